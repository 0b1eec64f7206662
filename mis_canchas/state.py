from mis_canchas.states.root_state import RootState


class State(RootState):
    """Estado de la aplicacion."""
