"""Authentication and authorization.

Learn: Opaque bearer tokens, not JWTs. The pieces, leaves first:

1. password  — bcrypt credential (Password.set / Password.matches)
2. tokens    — random token + SHA-256 digest (generate_token)
3. identity  — ANONYMOUS or Identity(user), one per request
4. gate      — Authorization header → Identity
5. guard     — require_authenticated / require_owner
6. dependencies — the FastAPI wiring for 4 and 5

Token issuance and resolution against the store live in
fitlog.services.token_service.
"""
