"""Profile domain - Account owner business details"""
