"""Studios app package.

Holds the studios owned by studio owners and the rentable rooms inside
them. Room rates are the input of booking pricing; listing and editing
studios is handled elsewhere.
"""
