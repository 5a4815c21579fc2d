"""Command-line front end for identity-assurance dataset extraction.

Usage:
    ida extract request.json dataset.json
    ida extract - dataset.json --now 2022-04-01T00:00:00Z < request.json
    ida digest filtered.json
"""
