"""
Ingest pipeline per import Excel inventario tubi.

Questo modulo contiene la pipeline per l'elaborazione dei file:
- Cell Coercer (coercion.py): conversione cella → valore tipizzato
- Row Mapper (row_mapper.py): riga posizionale → campi tubo
- Duplicate Guard (dedup.py): verifica pipe_number esistente
- Batch Orchestrator (pipeline.py): iterazione righe, isolamento errori
- Batch Reporter (report.py): aggregazione esiti in BatchReport
"""
