"""Authentication and authorization.

Learn: Two ways in, one way to prove who you are afterwards:
1. Email/password → bcrypt verify → JWT bearer token
2. Google OAuth → link-or-create local user → JWT bearer token

Every protected route then only needs the bearer token. The OAuth
handshake keeps its own short-lived signed state (auth.handshake),
separate from the bearer tokens (auth.jwt).
"""
