"""
Conformance harness for geodetic reference-system factories.

Builds geodetic objects through the factories of an implementation under
test and verifies them against GIGS and EPSG reference data.
"""

__version__ = "1.0.0"
