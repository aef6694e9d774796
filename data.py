# data.py
# Veículos de exemplo para `flask --app app seed-vehicles` (ambiente de desenvolvimento).

VEICULOS = [
    {"plate": "AAA1B23", "state": "PR", "inspection_date": "2024-01-08", "brand": "VW", "model": "GOL 1.0",
     "vehicle_type": "Automóvel", "has_key": True, "chassis_observation": "", "release_date": "2024-02-10",
     "city": "Medianeira"},
    {"plate": "BCD4E56", "state": "PR", "inspection_date": "2024-01-15", "brand": "HONDA", "model": "CG 160 FAN",
     "vehicle_type": "Motocicleta", "has_key": False, "chassis_observation": "Chassi remarcado",
     "release_date": "2024-03-01", "city": "Missal"},
    {"plate": "QWE7R89", "state": "SC", "inspection_date": "2024-02-02", "brand": "FIAT", "model": "STRADA",
     "vehicle_type": "Caminhonete", "has_key": True, "chassis_observation": "", "release_date": "2024-02-20",
     "city": "SMI"},
    {"plate": "MNB2C34", "state": "PR", "inspection_date": "2024-02-19", "brand": "YAMAHA", "model": "NEO 125",
     "vehicle_type": "Motoneta", "has_key": False, "chassis_observation": "", "release_date": "2024-04-05",
     "city": "Itaipulândia"},
    {"plate": "XYZ0A12", "state": "EX", "inspection_date": "2024-03-11", "brand": "CHEVROLET", "model": "ONIX",
     "vehicle_type": "Automóvel", "has_key": True, "chassis_observation": "Placa paraguaia",
     "release_date": "2024-03-30", "city": "Medianeira"},
    {"plate": "HJK5L67", "state": "MS", "inspection_date": "2024-03-15", "brand": "MERCEDES-BENZ", "model": "1113",
     "vehicle_type": "Caminhão", "has_key": False, "chassis_observation": "", "release_date": "2024-05-02",
     "city": "Serranópolis"},
    {"plate": "TRE9W01", "state": "PR", "inspection_date": "2024-04-03", "brand": "MASSEY FERGUSON", "model": "275",
     "vehicle_type": "Trator de Rodas", "has_key": True, "chassis_observation": "", "release_date": "2024-04-18",
     "city": "Missal"},
]
