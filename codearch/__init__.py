""" Schema-driven JSON document tree engine. """
