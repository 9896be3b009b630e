# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Manifest readers and step output helpers."""
