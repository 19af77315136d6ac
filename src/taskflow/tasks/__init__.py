"""
Task hierarchy and kanban-state subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, TaskInput, TaskUpdate, OperationResult)
- task_errors.py: validation / remote / unauthenticated / cycle errors
- task_index.py: flattened view of a fetched forest (by id, by parent id)
- ancestry.py: descendants and legal-parent resolution (cycle prevention)
- kanban.py: status lanes and partitioning
- board.py: view state, refresh cycle, optimistic overlay, deletion
- transitions.py: status moves and drag-and-drop
- task_form.py: create/edit form validation and submission
"""
