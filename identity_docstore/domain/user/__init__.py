"""User identity domain module.

Holds the user aggregate, its side-index records (email lookup, email
confirmation) and the capability interfaces exposed to callers.
"""
