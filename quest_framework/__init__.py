"""
Quest Framework module.

Conversation and progression systems built on top of the engine:
- Dialogue (trees, conditions, actions, sessions)
- Progression (tasks, unlock requirements, module unlocking)
- State (progress store, module contexts)
- World (NPCs)
- Modules (definitions, registry)
"""
