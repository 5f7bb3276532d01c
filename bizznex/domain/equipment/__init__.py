"""Equipment domain - Equipment inventory and maintenance records"""
