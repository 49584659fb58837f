"""
Routes package

One blueprint per area, all answering with the action envelope from
api_responses.
"""
