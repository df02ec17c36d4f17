"""Engine core: ledger, RNG, game engines and the session coordinator."""
