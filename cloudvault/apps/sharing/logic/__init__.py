"""Share-link issuing and resolution."""
