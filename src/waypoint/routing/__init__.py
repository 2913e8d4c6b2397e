"""Routing — bracket-placeholder route table with ordered first-match lookup.

Routes are registered during setup and scanned in registration order
when a request is matched.
"""
