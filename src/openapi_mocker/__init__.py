"""
OpenAPI Mocker

Mock HTTP server that serves the examples authored in an OpenAPI 3
contract, with example selection driven by path, query and headers.
"""

__version__ = '1.0.0'
