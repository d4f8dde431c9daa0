"""
Top-level package for the resource catalog facet search engine.

This package contains modules for loading a catalog snapshot, building
topic trees and weighted fuzzy indices over resources and articles,
applying facet filters, sorting and pagination, keeping the filter state
in sync with the dashboard URL, and serving the result through a small
HTTP API or a batch CLI.  There are no side-effects on import and most
modules can be executed as a script for ad-hoc debugging.
"""
