"""Client registry domain - Customer records and derived job/spend figures"""
