"""Authentication and authorization.

Learn: Identity is a bearer JWT whose only claim is the user's email.
Two phases:
1. Authentication — the dependency validates the token and resolves
   the email to a Principal (id 0 if no such user exists).
2. Authorization — handlers require a known user (401 otherwise) and,
   for admin routes, the admin flag (403 otherwise).
"""
