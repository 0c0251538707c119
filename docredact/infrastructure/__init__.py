"""Infrastructure adapters: PDF/image handling, extraction tiers, vision, feedback, configuration."""
