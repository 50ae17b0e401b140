"""Use-cases: train, evaluate and inspect specification trees."""
