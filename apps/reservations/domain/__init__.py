"""Pure reservation domain: slots, conflicts, pricing, lifecycle and events."""
