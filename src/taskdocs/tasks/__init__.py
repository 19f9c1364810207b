"""
Task subsystem.

Components:
- task_models.py: data structures (Task, AttachmentFile, Status, Draft, ViewModel)
- task_store.py: PostgREST-backed record store
- task_api.py: attachment key naming + upload helper
- task_engine.py: lifecycle engine (create/update/delete/toggle/attach) owning the view-model
- task_view.py: pure projection of the view-model for presentation
"""
