"""K-ANALYZE: forensic AI-generated vs. human image detection backed by Gemini."""
