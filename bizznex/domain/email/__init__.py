"""Email domain - Transactional email dispatch and send history"""
