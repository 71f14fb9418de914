"""Help strings shown by `lightning-cli help <method>`."""

GET_CHAIN_INFO_HELP = """
    Returns general information about the chain we are in.

    Result:
        chain: the chain we are in, should be one of bitcoin, testnet, signet or regtest (string)
        headercount: how many headers we know about (number)
        blockcount: how many blocks we have downloaded and validated, should be <= headercount (number)
        ibd: whether we are on Initial Block Download (bool)
"""

SEND_RAW_TRANSACTION_HELP = """
    Sends a hex-encoded transaction to be included in the blockchain

    Returns:
        success: whether we did succeed into sending the transaction (bool)
        errmsg: An error, if any (string)
"""

GET_UTXOUT_HELP = """
    Returns the associated UTXO amount and script. It only returns if the UTXO exists
    i.e. it have been created and not spent.

    Returns:
        amount: the amount of satoshis in this UTXO (number)
        script: the locking script for this UTXO (string)
"""

ESTIMATE_FEES_HELP = """
    Returns the fee needed in order to confirm a transaction in 2, 6, 12, 100 blocks.
    This is returned in sats/KWU. The values are a fixed placeholder, florestad
    has no fee estimator.

    Returns:
        feerate_floor: The minimun value accepted to even be accepted to the mempool
        feerates: A list of feerate for different confirmation targets
            2: fee in sats/KWU to confirm in 2 blocks (number)
            6:  fee in sats/KWU to confirm in 6 blocks (number)
            12:  fee in sats/KWU to confirm in 12 blocks (number)
            100:  fee in sats/KWU to confirm in 100 blocks (number)
"""

GET_RAW_BLOCK_BY_HEIGHT_HELP = """
    Returns the hex-encoded block, given its height

    Returns:
        blockhash: hash of the block at this height, null if unknown (string)
        block: hex-encoded block, null if unknown (string)
"""
