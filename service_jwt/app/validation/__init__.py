"""
Token validation package.

Runs the ordered verification stages over a compact token: structure,
decoding, header, claims, expiry, key discovery and signature. Each stage
reports a tagged outcome; the public contract is the subject or ``False``.
"""
