"""Billing domain - Subscription checkout, customer portal and payment webhooks"""
