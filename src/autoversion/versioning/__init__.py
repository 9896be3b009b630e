# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Version resolution subpackage."""
