"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos
  (pyVmomi, SoftLayer REST, DNS).
- Permite invertir dependencias: el Core depende de abstracciones.
"""
