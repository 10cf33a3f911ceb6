"""
Services layer - Business logic goes here.
Keep services focused on specific domains (complaints, notifications, stores).

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- Stores are injected into the lifecycle coordinator, never looked up
  from inside a transition
"""
