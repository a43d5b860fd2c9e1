"""Platform I/O collaborators: they read raw text or records and nothing else."""
