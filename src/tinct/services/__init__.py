"""Service layer — compile and explain operations returning ServiceResult."""
