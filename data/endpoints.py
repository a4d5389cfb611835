"""Relayer REST paths."""

GET_NONCE = "/nonce"
GET_TRANSACTION = "/transaction"
GET_TRANSACTIONS = "/transactions"
GET_DEPLOYED = "/deployed"
SUBMIT_TRANSACTION = "/submit"
