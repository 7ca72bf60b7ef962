# ABOUTME: Transport collaborator: fetches the available-download catalog and archive bytes.
# ABOUTME: The core consumes what this returns and never makes network decisions itself.
