from .client import CodeGenerator, GeneratedFile, GeneratedProgram, GenerationError, parse_reply

__all__ = ["CodeGenerator", "GeneratedFile", "GeneratedProgram", "GenerationError", "parse_reply"]
