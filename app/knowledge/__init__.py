"""Knowledge base: corporate policy and debtor history used to personalize replies."""
