"""Expenses domain - Vendor receipts logged against jobs"""
