"""
Shared kernel of the reservation engine

Domain building blocks, the unit of work, the event bus and the HTTP
mapping of rejection kinds, used by every app under apps/.
"""
