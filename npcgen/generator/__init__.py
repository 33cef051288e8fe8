"""
NPC Generation Layer.

Resolves dialog selections, derives statistics from the data tables,
composes the language-model query and merges the reply into a
``GeneratedNPC``. ``NPCGenerator`` in ``builder`` runs the whole sequence.
"""
