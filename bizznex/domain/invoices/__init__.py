"""Invoice domain - Invoice engine, payments and PDF rendering"""
