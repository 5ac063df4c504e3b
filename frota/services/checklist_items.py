"""
Itens de inspeção dos checklists, por tipo de item inspecionado
"""

VEHICLE_ITEMS = [
    "Retrovisores", "Parabrisa", "Certificado cronotacógrafo", "Veículo está abastecido",
    "Extintor", "Alavanca bascular cabine", "Macaco hidráulico", "Sistema elétrico",
    "Lanterna traseira direita", "Lanterna traseira esquerda", "Limpeza interna cabine",
    "Sistema de som/radio", "Funcionamento do farol (alta/baixa)", "Funcionamento do pisca alerta",
    "Estado dos bancos (estofamento)", "Nível de óleo do motor", "Nível de água do radiador",
    "Placa do veículo legível", "Sirene de marcha ré", "Luz de placa", "Estado geral do bau",
    "Luz interna do bau", "Carrinho de descarga", "Ar condicionado", "Buzina", "Tampa de Combustível",
    "Estado dos Pneus", "Outros",
]

_FORKLIFT_COMMON_TAIL = [
    "Operador utilizando EPIS",
    "Extintor com carga plena e no prazo de validade",
    "Cinto de segurança em boas condições?",
    "A torre, corrente e garfos estão em boas condições de uso?",
    "Diante de todos os pontos observados, a empilhadeira está em condições de operar normalmente?",
    "Outros",
]

_HYDRAULIC_LEAK = (
    "O SISTEMA HIDRÁULICO (MANGUEIRAS E BOMBAS) APRESENTAM ALGUM ASPECTO QUE INDIQUE VAZAMENTO DE ÓLEO?"
)

# Empilhadeira sem tipo definido
FORKLIFT_DEFAULT_ITEMS = [
    "Faróis Dianteiros", "Stop De Freio", "Sinal Sonoro (Buzina)", "Ré Sonoro",
    "Pneus estão em boas condições",
    "O SISTEMA DE ALIMENTAÇÃO (MANGUEIRAS E BOTIJÃO) APRESENTAM ALGUM ASPECTO OU ODOR QUE INDIQUE VAZAMENTO DE GÁS?",
    _HYDRAULIC_LEAK, "Sistema de Frenagem", "Sistema de refrigeração do motor (radiador)",
] + _FORKLIFT_COMMON_TAIL

FORKLIFT_GAS_ITEMS = [
    "Faróis Dianteiros", "Stop De Freio", "Sinal Sonoro (Buzina)", "Ré Sonoro",
    "Pneus estão em boas condições", "O sistema de alimentação de gás está ok?",
    _HYDRAULIC_LEAK, "Sistema de Frenagem", "Sistema de refrigeração do motor (radiador)",
] + _FORKLIFT_COMMON_TAIL

FORKLIFT_ELECTRIC_ITEMS = [
    "Faróis Dianteiros", "Sinal Sonoro (Buzina)", "Ré Sonoro", "Pneus estão em boas condições",
    "Carga da bateria suficiente para operação?", "Cabos, conexões e plugs em bom estado?",
    "Sistema de Frenagem", "Sistema de refrigeração do motor (Ventoinha)",
] + _FORKLIFT_COMMON_TAIL

PALLET_JACK_ITEMS = [
    "Condição das rodinhas",
    "Alavanca de elevação funcionando",
    "Estrutura sem trincos/soltas",
    "Sem vazamentos de óleo ou graxa",
    "Diante de todos os pontos, a paleteira está em condições de operar?",
    "Outros",
]

GALVANIZED_PALLET_JACK_ITEMS = [
    "Condição das rodinhas",
    "Alavanca galvanizada funcionando",
    "Estrutura galvanizada sem danos",
    "Sem sinais de ferrugem",
    "Diante de todos os pontos, a paleteira galvanizada está em condições de operar?",
    "Outros",
]

GENERATOR_ITEMS = [
    "Nível de óleo do motor", "Nível de água do radiador", "Nível de combustível",
    "Bateria carregada", "Painel de controle funcional", "Sistema de exaustão",
    "Cabos e conexões", "Sistema de partida", "Proteções (fusíveis/disjuntores)",
    "Vazamentos visíveis", "Outros",
]


def checklist_items(subject_type: str, subject=None) -> list:
    """Lista de itens para o tipo de item e, em equipamentos, conforme o tipo/variante"""
    if subject_type == "vehicle":
        return list(VEHICLE_ITEMS)
    if subject_type == "generator":
        return list(GENERATOR_ITEMS)

    kind = getattr(subject, "kind", None)
    if kind == "paleteira":
        if (getattr(subject, "variant", None) or "").lower() == "galvanizada":
            return list(GALVANIZED_PALLET_JACK_ITEMS)
        return list(PALLET_JACK_ITEMS)

    fuel_class = (getattr(subject, "fuel_class", None) or "").lower()
    if fuel_class == "gas":
        return list(FORKLIFT_GAS_ITEMS)
    if fuel_class == "eletrica":
        return list(FORKLIFT_ELECTRIC_ITEMS)
    return list(FORKLIFT_DEFAULT_ITEMS)
