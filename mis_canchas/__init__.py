"""Mis Canchas: reservas de canchas y gestion de caja para establecimientos deportivos."""
