# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Tag storage backends and tag reconciliation."""
