"""
Static generation tables.

Everything the dialog offers and every number the stat generator derives
comes from ``npcgen.data.tables``.
"""
