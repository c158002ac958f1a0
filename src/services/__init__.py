"""Business logic services used by handlers.

Services are imported lazily by handlers so that importing the router does not
open AWS or HTTP clients at module load.
"""

# Do NOT import services here - use lazy loading in handlers instead
