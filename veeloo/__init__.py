"""Plan entitlements and daily message quota for the Veeloo messaging surface."""
