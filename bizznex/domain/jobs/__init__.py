"""Job scheduling domain - Service appointments and recurrence"""
