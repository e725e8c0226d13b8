"""
WaitWise: wait-time intelligence and venue recommendations.

Turns crowdsourced wait-time reports into per-venue current estimates and
historical profiles, and ranks venue catalogs against user preferences.
"""
