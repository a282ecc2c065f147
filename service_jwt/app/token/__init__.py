"""
Token package.

- model: header/claim set construction and expiry normalization.
- codec: base64url, canonical JSON and the compact three-segment form.
- keys: ES256 JWK generation, signing and verification primitives.
- signer: async signing of a token into its compact form.
"""
