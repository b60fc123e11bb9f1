"""
Deployment Scripts
==================

One script per deployment scenario of the Keeper and Founders contracts:

- deploy_keeper_token.py: KEEPER, KeeperNFT and KeeperTB
- deploy_founders_pass.py: FoundersPass
- deploy_founders_keeper.py: FoundersKeeper

Extra arguments (``--network``, ``--resume`` ...) are passed to the deployment CLI.
"""
