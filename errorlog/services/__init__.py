"""
errorlog Services

- log_buffer - Log/crash-report buffering, local file and periodic upload
"""
