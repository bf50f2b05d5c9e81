"""Step-by-step visualization of Booth multiplication."""
