"""
Wallet primitives: transaction codec, P2PKH addresses, WIF keys and BIP32 derivation.
"""
