"""
MJML Email Templates
Client-facing transactional emails: invoice, job confirmation and payment receipt.
Each builder returns MJML; email_service compiles it to HTML before sending.
"""

from html import escape
from typing import Optional

# Brand palette for Bizznex emails
THEME = {
    "primary": "#16a34a",
    "primary_dark": "#15803d",
    "primary_light": "#dcfce7",
    "background": "#f1f5f9",
    "surface": "#ffffff",
    "heading": "#0f172a",
    "body": "#334155",
    "muted": "#64748b",
    "rule": "#e2e8f0",
}

FONT_STACK = "'Inter', 'Segoe UI', Helvetica, Arial, sans-serif"


def _money(value) -> str:
    return f"${float(value or 0):,.2f}"


def _greeting(client_name: str) -> str:
    return f"<mj-text>Hi {escape(client_name or 'there')},</mj-text>"


def _amount_banner(label: str, amount: float) -> str:
    """Large centered figure with a small caption above it"""
    return f"""
    <mj-text align="center" font-size="13px" text-transform="uppercase" color="{THEME['muted']}" padding="16px 0 0 0">
      {label}
    </mj-text>
    <mj-text align="center" font-size="34px" font-weight="700" color="{THEME['primary_dark']}" padding="4px 0 16px 0">
      {_money(amount)}
    </mj-text>
    """


def _detail_table(rows: list[tuple[str, str]]) -> str:
    """Two-column label/value table; rows with an empty value are skipped"""
    cells = "".join(
        f"<tr><td style=\"padding:6px 0;color:{THEME['muted']}\">{escape(label)}</td>"
        f"<td style=\"padding:6px 0;text-align:right;color:{THEME['heading']}\">{escape(str(value))}</td></tr>"
        for label, value in rows
        if value
    )
    return f"""
    <mj-table font-size="14px" padding="8px 0" container-background-color="{THEME['primary_light']}">
      {cells}
    </mj-table>
    """


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    business_name: str = "Bizznex",
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Shared frame: business name banner, titled card, optional button, footer"""
    business = escape(business_name)
    button = ""
    if cta_url and cta_label:
        button = (
            f'<mj-button href="{cta_url}" background-color="{THEME["primary"]}" '
            f'border-radius="6px" font-size="15px" padding="24px 0 0 0">{cta_label}</mj-button>'
        )

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{escape(title)}</mj-title>
        <mj-preview>{escape(preview_text)}</mj-preview>
        <mj-attributes>
          <mj-all font-family="{FONT_STACK}" />
          <mj-text font-size="15px" line-height="1.6" color="{THEME['body']}" padding="0 0 12px 0" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}" width="600px">
        <mj-section background-color="{THEME['primary']}" padding="20px 32px">
          <mj-column>
            <mj-text font-size="18px" font-weight="700" color="#ffffff" padding="0">{business}</mj-text>
          </mj-column>
        </mj-section>

        <mj-section background-color="{THEME['surface']}" padding="32px">
          <mj-column>
            <mj-text font-size="22px" font-weight="600" color="{THEME['heading']}" padding="0 0 20px 0">
              {escape(title)}
            </mj-text>
            {content_sections}
            {button}
          </mj-column>
        </mj-section>

        <mj-section padding="24px 32px">
          <mj-column>
            <mj-divider border-color="{THEME['rule']}" border-width="1px" padding="0 0 16px 0" />
            <mj-text align="center" font-size="12px" color="{THEME['muted']}" padding="0">
              Sent by {business} with Bizznex
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def invoice_email_template(
    client_name: str,
    business_name: str,
    invoice_number: str,
    total_amount: float,
    balance_due: float,
    due_date: str = "",
    notes: Optional[str] = None,
) -> str:
    """Invoice notification for a client"""
    content = (
        _greeting(client_name)
        + f"<mj-text>{escape(business_name)} has sent you invoice {escape(invoice_number)}.</mj-text>"
        + _amount_banner("Balance due", balance_due)
        + _detail_table(
            [
                ("Invoice", invoice_number),
                ("Invoice total", _money(total_amount)),
                ("Due date", due_date),
            ]
        )
    )
    if notes:
        content += f'<mj-text font-size="14px" color="{THEME["muted"]}">{escape(notes)}</mj-text>'

    return get_base_template(
        title="Your invoice is ready",
        preview_text=f"Invoice {invoice_number} from {business_name}",
        content_sections=content,
        business_name=business_name,
    )


def job_confirmation_template(
    client_name: str,
    business_name: str,
    service: str,
    service_date: str,
    time_slot: Optional[str] = None,
    address: Optional[str] = None,
    recurring_type: str = "none",
) -> str:
    """Job booking confirmation for a client"""
    repeats = recurring_type.capitalize() if recurring_type and recurring_type != "none" else ""
    content = (
        _greeting(client_name)
        + f"<mj-text>Your appointment with {escape(business_name)} is confirmed.</mj-text>"
        + _detail_table(
            [
                ("Service", service),
                ("Date", service_date),
                ("Time", time_slot or ""),
                ("Address", address or ""),
                ("Repeats", repeats),
            ]
        )
        + f'<mj-text font-size="14px" color="{THEME["muted"]}">'
        "Reply to this email if you need to reschedule.</mj-text>"
    )

    return get_base_template(
        title="Service confirmed",
        preview_text=f"{service} on {service_date}",
        content_sections=content,
        business_name=business_name,
    )


def payment_received_template(
    client_name: str,
    business_name: str,
    invoice_number: str,
    amount: float,
    balance_due: float,
    payment_date: Optional[str] = None,
) -> str:
    """Payment receipt for a client"""
    if balance_due <= 0:
        status_line = "Your invoice is now paid in full."
    else:
        status_line = f"Remaining balance: {_money(balance_due)}"

    content = (
        _greeting(client_name)
        + "<mj-text>Thank you, we received your payment.</mj-text>"
        + _amount_banner("Amount paid", amount)
        + _detail_table([("Invoice", invoice_number), ("Payment date", payment_date or "")])
        + f'<mj-text font-weight="600" color="{THEME["primary_dark"]}">{status_line}</mj-text>'
    )

    return get_base_template(
        title="Payment received",
        preview_text=f"Payment of {_money(amount)} received for {invoice_number}",
        content_sections=content,
        business_name=business_name,
    )


__all__ = [
    "THEME",
    "get_base_template",
    "invoice_email_template",
    "job_confirmation_template",
    "payment_received_template",
]
