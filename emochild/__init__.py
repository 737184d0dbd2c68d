"""EmoChild state engine: emotion logs, a reacting creature, durable local persistence."""
