"""
Messages affichés à l'utilisateur (interface en portugais).
"""

# Authentification
LOGIN_OK = "Login realizado com sucesso!"
INVALID_CREDENTIALS = "E-mail ou senha incorretos"
SIGNUP_OK = "Cadastro realizado com sucesso! Você já pode fazer login."
ALREADY_REGISTERED = "Este e-mail já está cadastrado"
SIGNED_OUT = "Sessão encerrada"
NOT_AUTHENTICATED = "Usuário não autenticado"
USER_NOT_FOUND = "Usuário não encontrado"

# Mot de passe
PASSWORD_CHANGED = "Senha alterada com sucesso!"
CURRENT_PASSWORD_INCORRECT = "Senha atual incorreta"
PASSWORD_CHANGE_FAILED = "Erro ao alterar senha"

# Élèves
STUDENT_CREATED = "Aluno cadastrado com sucesso!"
STUDENT_UPDATED = "Aluno atualizado com sucesso!"
STUDENT_DELETED = "Aluno excluído com sucesso!"
STUDENT_DUPLICATE = "Este e-mail ou matrícula já está cadastrado"
STUDENT_NOT_FOUND = "Aluno não encontrado"
NO_PENDING_DELETE = "Nenhum aluno selecionado para exclusão"
DELETE_PROMPT = "Tem certeza que deseja excluir o aluno {name}? Esta ação não pode ser desfeita."
SAVE_FAILED = "Erro ao salvar: "
LOAD_FAILED = "Erro ao carregar alunos: "
DELETE_FAILED = "Erro ao excluir aluno: "
EMPTY_LIST = "Nenhum aluno cadastrado ainda"

# Divers
BUSY = "Operação em andamento, aguarde"
