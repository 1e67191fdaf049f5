"""lockledger — escrow ledger, oracle amount calculator and claim arbiter."""
