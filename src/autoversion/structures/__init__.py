# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Data structures shared by version resolution and tag reconciliation."""
