"""Bizznex back office API"""
