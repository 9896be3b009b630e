# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Derive release versions from release branches and keep major/minor/patch tags in sync."""

__version__ = "0.1.0"
