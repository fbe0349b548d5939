"""Ad exchange package.

Member websites earn credits by showing other members' ads and spend them
when their own ad is clicked.
"""

__all__: list[str] = []
