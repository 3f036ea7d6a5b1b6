"""Accounts bounded context.

Owns the User aggregate of the auction platform: identity, the LimCoin
balance, the inventory of owned items, and the rosters of auctions a user
is bidding on or has listed. Auctions and item valuation are owned by
remote services reached through gateway ports.
"""
