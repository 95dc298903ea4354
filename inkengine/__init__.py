"""
InkAlchemy engine -- search, tag recommendation and the entity-connection
graph for a creative-writing worldbuilding organizer.
"""

__version__ = "0.1.0"
