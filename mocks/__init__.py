"""
In-process mock services used by the integration tests.
"""
