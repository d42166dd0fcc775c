"""
Core functionality per pipe-processor.

Questo modulo contiene:
- Configurazione (config.py)
- Database e modello tubi (database.py)
- Record store (repository.py)
- Servizio tubi (pipe_service.py)
- Eccezioni (errors.py)
- Logging (logger.py)
"""
