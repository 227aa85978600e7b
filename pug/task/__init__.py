"""Tasks: specs, creation, grouping, dependencies, queueing and running."""